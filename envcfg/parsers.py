"""Built-in conversion functions for common types.

They are exported so that a loader can start from ``Loader.empty()`` and pick the ones it wants.
Each parser returns ``(value, None)`` on success and ``(<zero value>, error)`` on failure.
"""

import re
import string
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from email.headerregistry import Address
from email.utils import getaddresses
from ipaddress import IPv4Address, IPv6Address, ip_address
from pathlib import Path
from urllib.parse import ParseResult, urlparse

from .common import compat_typing as t
from .network.mac import MacAddress, parse_mac

IPAddress = t.Union[IPv4Address, IPv6Address]

_TRUE_STRINGS = ('1', 't', 'T', 'TRUE', 'true', 'True')
_FALSE_STRINGS = ('0', 'f', 'F', 'FALSE', 'false', 'False')

_INT_PATTERN = re.compile(r'^[+-]?[0-9]+$')

_DURATION_PATTERN = re.compile(r'^[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:ns|us|µs|μs|ms|s|m|h))+$')
_DURATION_PART = re.compile(r'([0-9]*\.?[0-9]*)(ns|us|µs|μs|ms|s|m|h)')
_DURATION_MICROSECONDS = {
    'ns': 0.001,
    'us': 1.0,
    'µs': 1.0,  # U+00B5 micro sign
    'μs': 1.0,  # U+03BC greek mu
    'ms': 1000.0,
    's': 1000000.0,
    'm': 60000000.0,
    'h': 3600000000.0,
}

_RFC3339_PATTERN = re.compile(
    r'^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$'
)


def parse_bool(s: str) -> t.Tuple[bool, t.Optional[ValueError]]:
    if s in _TRUE_STRINGS:
        return True, None
    if s in _FALSE_STRINGS:
        return False, None
    return False, ValueError(f'invalid boolean: {s!r}')


def parse_str(s: str) -> t.Tuple[str, t.Optional[Exception]]:
    return s, None


def parse_int(s: str) -> t.Tuple[int, t.Optional[ValueError]]:
    if not _INT_PATTERN.match(s):
        return 0, ValueError(f'invalid integer: {s!r}')
    return int(s), None


def parse_float(s: str) -> t.Tuple[float, t.Optional[ValueError]]:
    try:
        return float(s), None
    except ValueError as e:
        return 0.0, e


def parse_decimal(s: str) -> t.Tuple[Decimal, t.Optional[ValueError]]:
    try:
        return Decimal(s), None
    except InvalidOperation:
        return Decimal(0), ValueError(f'invalid decimal: {s!r}')


def parse_duration(s: str) -> t.Tuple[timedelta, t.Optional[ValueError]]:
    """Parse a duration such as "300ms", "1.5h" or "2h45m"

    Valid units are "ns", "us" (or "µs"), "ms", "s", "m", "h". A bare "0" is accepted.
    """
    if s in ('0', '+0', '-0'):
        return timedelta(0), None
    if not _DURATION_PATTERN.match(s):
        return timedelta(0), ValueError(f'invalid duration: {s!r}')
    microseconds = 0.0
    for number, unit in _DURATION_PART.findall(s.lstrip('+-')):
        microseconds += float(number) * _DURATION_MICROSECONDS[unit]
    total = timedelta(microseconds=microseconds)
    if s.startswith('-'):
        total = -total
    return total, None


def parse_datetime(s: str) -> t.Tuple[datetime, t.Optional[ValueError]]:
    """Parse a RFC 3339 timestamp, e.g. "2017-12-25T00:00:00Z" """
    match = _RFC3339_PATTERN.match(s)
    if not match:
        return datetime.min, ValueError(f'invalid RFC 3339 timestamp: {s!r}')
    year, month, day, hour, minute, second, fraction, offset = match.groups()
    if offset in ('Z', 'z'):
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == '-' else 1
        tz = timezone(sign * timedelta(hours=int(offset[1:3]), minutes=int(offset[4:6])))
    microsecond = int((fraction or '0')[:6].ljust(6, '0'))
    try:
        dt = datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), microsecond, tzinfo=tz
        )
    except ValueError as e:
        return datetime.min, e
    return dt, None


def parse_url(s: str) -> t.Tuple[ParseResult, t.Optional[ValueError]]:
    try:
        url = urlparse(s)
    except ValueError as e:
        return urlparse(''), e
    if not url.scheme:
        return url, ValueError(f'URL has no scheme: {s!r}')
    return url, None


def parse_mac_address(s: str) -> t.Tuple[MacAddress, t.Optional[ValueError]]:
    try:
        return parse_mac(s), None
    except ValueError as e:
        return MacAddress(), e


def parse_ip(s: str) -> t.Tuple[IPAddress, t.Optional[ValueError]]:
    try:
        return ip_address(s), None
    except ValueError:
        return IPv4Address(0), ValueError(f'{s} is not a valid IP address')


def parse_ipv4(s: str) -> t.Tuple[IPv4Address, t.Optional[ValueError]]:
    try:
        return IPv4Address(s), None
    except ValueError:
        return IPv4Address(0), ValueError(f'{s} is not a valid IPv4 address')


def parse_ipv6(s: str) -> t.Tuple[IPv6Address, t.Optional[ValueError]]:
    try:
        return IPv6Address(s), None
    except ValueError:
        return IPv6Address(0), ValueError(f'{s} is not a valid IPv6 address')


def _to_address(name: str, addr: str, raw: str) -> Address:
    if '@' not in addr:
        raise ValueError(f'invalid email address: {raw!r}')
    return Address(display_name=name, addr_spec=addr)


def parse_email_address(s: str) -> t.Tuple[Address, t.Optional[ValueError]]:
    """Parse one address, e.g. "Alice <alice@example.com>" """
    try:
        pairs = getaddresses([s])
        if len(pairs) != 1:
            raise ValueError(f'expected a single email address: {s!r}')
        return _to_address(pairs[0][0], pairs[0][1], s), None
    except (ValueError, IndexError) as e:
        return Address(), ValueError(str(e))


def parse_email_address_list(s: str) -> t.Tuple[t.List[Address], t.Optional[ValueError]]:
    """Parse comma separated addresses, e.g. "Alice <alice@example.com>, bob@example.com" """
    try:
        return [_to_address(name, addr, s) for name, addr in getaddresses([s])], None
    except (ValueError, IndexError) as e:
        return [], ValueError(str(e))


def parse_template(s: str) -> t.Tuple[string.Template, t.Optional[ValueError]]:
    template = string.Template(s)
    try:
        # raises on malformed placeholders such as "$" alone
        template.substitute({name: '' for name in _template_identifiers(template)})
    except (ValueError, KeyError) as e:
        return template, ValueError(f'invalid template {s!r}: {e}')
    return template, None


def _template_identifiers(template: string.Template) -> t.List[str]:
    names = []
    for match in template.pattern.finditer(template.template):
        name = match.group('named') or match.group('braced')
        if name:
            names.append(name)
    return names


def parse_bytes(s: str) -> t.Tuple[bytes, t.Optional[Exception]]:
    return s.encode('utf-8'), None


def parse_path(s: str) -> t.Tuple[Path, t.Optional[ValueError]]:
    if not s:
        return Path(), ValueError('empty path')
    return Path(s).expanduser(), None


# A few types have no counterpart here: sized integers (use int), complex and memoryview.
DEFAULT_PARSERS: t.List[t.Callable[..., t.Any]] = [
    parse_bool,
    parse_str,
    parse_int,
    parse_float,
    parse_decimal,
    parse_duration,
    parse_datetime,
    parse_url,
    parse_mac_address,
    parse_ip,
    parse_ipv4,
    parse_ipv6,
    parse_email_address,
    parse_email_address_list,
    parse_template,
    parse_bytes,
    parse_path,
]
