# -*- coding: utf-8 -*-
from setuptools import setup

package_dir = \
{'': 'python'}

packages = \
['certwatch',
 'certwatch.certs',
 'certwatch.client',
 'certwatch.client.commands',
 'certwatch.datamodel',
 'certwatch.datamodel.types',
 'certwatch.files',
 'certwatch.sources',
 'certwatch.utils',
 'certwatch.utils.modeling',
 'certwatch.watcher']

install_requires = \
['aiohttp', 'cryptography>=42.0', 'pyyaml', 'typing-extensions']

extras_require = \
{'prometheus': ['prometheus-client'],
 'test': ['pytest', 'pytest-asyncio'],
 'watchdog': ['watchdog']}

entry_points = \
{'console_scripts': ['certwatch = certwatch.client.main:main']}

setup_kwargs = {
    'name': 'certwatch',
    'version': '1.2.0',
    'description': 'Keeps long-running processes supplied with an up-to-date TLS certificate from a periodically renewed directory',
    'long_description': "# certwatch\n\nWatches a directory with `fullchain.pem` and `privkey.pem` files, periodically renewed by an external agent such as an ACME client, and keeps a long-running consumer supplied with the current certificate. Every change cancels the running consumer invocation, waits for it to finish and starts a new one with the freshly read certificate.\n",
    'long_description_content_type': 'text/markdown',
    'package_dir': package_dir,
    'packages': packages,
    'install_requires': install_requires,
    'extras_require': extras_require,
    'entry_points': entry_points,
    'python_requires': '>=3.9,<4.0',
}

setup(**setup_kwargs)
