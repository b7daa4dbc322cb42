from certwatch.constants import DEFAULT_LISTEN_ADDRESS, DEFAULT_LISTEN_PORT
from certwatch.datamodel.types import IPAddress, PortNumber
from certwatch.utils.modeling import ConfigSchema


class ServerSchema(ConfigSchema):
    """
    HTTPS server using the watched certificate.

    ---
    listen: IP address to listen on.
    port: Port number to listen on.
    """

    listen: IPAddress = IPAddress(DEFAULT_LISTEN_ADDRESS)
    port: PortNumber = PortNumber(DEFAULT_LISTEN_PORT)
