import re

# EUI-48, EUI-64 and 20-octet IP over InfiniBand link-layer addresses
VALID_OCTET_COUNTS = (6, 8, 20)

_HEX_GROUPS = {
    ':': re.compile(r'^[0-9a-fA-F]{2}(:[0-9a-fA-F]{2})+$'),
    '-': re.compile(r'^[0-9a-fA-F]{2}(-[0-9a-fA-F]{2})+$'),
    '.': re.compile(r'^[0-9a-fA-F]{4}(\.[0-9a-fA-F]{4})+$'),
}


class MacAddress(bytes):
    """Hardware address, printed as lowercase colon separated octets"""

    def __str__(self) -> str:
        return ':'.join(f'{b:02x}' for b in self)

    def __repr__(self) -> str:
        return f"MacAddress('{self}')"


def parse_mac(mac: str) -> MacAddress:
    """Parse a MAC address in colon, hyphen or dotted notation

    Raises:
        ValueError: wrong notation or octet count
    """
    for sep, pattern in _HEX_GROUPS.items():
        if pattern.match(mac):
            mac_clean = mac.replace(sep, '')
            break
    else:
        raise ValueError(f'Invalid MAC address: {mac}')
    if len(mac_clean) // 2 not in VALID_OCTET_COUNTS:
        raise ValueError(f'Invalid MAC address: {mac}')
    return MacAddress(bytes.fromhex(mac_clean))

