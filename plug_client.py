#!/usr/bin/python3
"""Client for TP-Link HS100/HS110 smartplugs.

Every operation opens its own connection, sends one command and reads one
reply. A SmartPlug holds nothing but the device address and an optional
timeout, and never changes after construction.
"""

import ipaddress
import json
import logging
import re
from enum import Enum, auto
from numbers import Real
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from plug_commands import (
    CLOUD, EMETER, GET_INFO, GET_REALTIME, GET_SCANINFO, GET_SYSINFO, NETIF,
    REBOOT, RESET, SET_LED_OFF, SET_RELAY_STATE, SYSTEM, build_command,
    led_off_flag_from, relay_state_flag_from)
from plug_errors import (
    AddressParseError, DeviceReportedError, KeyNotAvailableError,
    MalformedJSONError, MissingAddressComponentError)
from plug_extract import Missing, as_dict, as_int, as_list, as_str, extract
from plug_protocol import decode_frame, encode_frame
from plug_transport import send_receive

log = logging.getLogger(__name__)

SMARTPLUG_PORT = 9999

_HOSTNAME_RE = re.compile(
    r'^(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.(?!-)[A-Za-z0-9-]{1,63}(?<!-))*\.?$')


def _is_ip(host: str) -> bool:
  try:
    ipaddress.ip_address(host)
  except ValueError:
    return False
  return True


class DeviceAddress(NamedTuple):
  """Host (name or IP) and TCP port of a smartplug."""
  host: str
  port: int

  @classmethod
  def parse(cls, address: str,
            default_port: Optional[int] = SMARTPLUG_PORT) -> 'DeviceAddress':
    """Parses 'host', 'host:port', '[v6]:port' or a bare IPv6 address.

    The default port is used when the string carries none.
    """
    text = address.strip()
    if text.startswith('['):
      end = text.find(']')
      if end < 0:
        raise AddressParseError(address, 'missing closing bracket')
      host, rest = text[1:end], text[end + 1:]
      if rest and not rest.startswith(':'):
        raise AddressParseError(address, 'unexpected text after host')
      port_text = rest[1:] if rest else None
      if host and not _is_ip(host):
        raise AddressParseError(address, 'bracketed host must be an IP address')
    elif text.count(':') > 1:
      if not _is_ip(text):
        raise AddressParseError(address, 'invalid IPv6 address')
      host, port_text = text, None
    elif ':' in text:
      host, port_text = text.split(':')
    else:
      host, port_text = text, None

    if not host:
      raise MissingAddressComponentError('host')
    if not _is_ip(host) and not _HOSTNAME_RE.match(host):
      raise AddressParseError(address, f'invalid host {host!r}')

    if port_text is None:
      if default_port is None:
        raise MissingAddressComponentError('port')
      return cls(host, default_port)
    if not port_text:
      raise MissingAddressComponentError('port')
    if (not (port_text.isascii() and port_text.isdigit())
        or not 0 < int(port_text) < 65536):
      raise AddressParseError(address, f'invalid port {port_text!r}')
    return cls(host, int(port_text))

  def __str__(self) -> str:
    if ':' in self.host:
      return f'[{self.host}]:{self.port}'
    return f'{self.host}:{self.port}'


class _OnOff(Enum):
  """Two-state setting rendered as ON/OFF, with On being True."""

  def __str__(self) -> str:
    return self.value

  def __bool__(self) -> bool:
    return self.value == 'ON'

  def __invert__(self):
    return type(self).from_bool(not self)

  @classmethod
  def from_bool(cls, on: bool):
    return cls('ON' if on else 'OFF')


class PowerState(_OnOff):
  """Power relay state: ON means the outlet is powered."""
  ON = 'ON'
  OFF = 'OFF'


class LedState(_OnOff):
  """LED indicator state."""
  ON = 'ON'
  OFF = 'OFF'


class HwRevision(Enum):
  VERSION1 = auto()
  VERSION2 = auto()
  UNSUPPORTED = auto()


_HW_REVISIONS = {
    '1.0': HwRevision.VERSION1,
    '2.0': HwRevision.VERSION2,
}


class HwVersion(NamedTuple):
  """Hardware revision together with the raw hw_ver string."""
  revision: HwRevision
  raw: str

  def __str__(self) -> str:
    if self.revision is HwRevision.UNSUPPORTED:
      return f'unsupported ({self.raw})'
    return self.raw


def hw_version_from(hw_ver: str) -> HwVersion:
  return HwVersion(_HW_REVISIONS.get(hw_ver, HwRevision.UNSUPPORTED), hw_ver)


# (milli-unit field, base-unit field); version 1 hardware reports base units,
# version 2 reports milli-units.
EMETER_FIELDS = (
    ('voltage_mv', 'voltage'),
    ('current_ma', 'current'),
    ('power_mw', 'power'),
    ('total_wh', 'total'),
)


def _is_number(value: Any) -> bool:
  return isinstance(value, Real) and not isinstance(value, bool)


def reconcile_emeter_units(reading: Dict[str, Any]) -> Dict[str, Any]:
  """Returns a copy of an emeter reading carrying both unit conventions.

  Each quantity is handled on its own. A field already present is never
  overwritten, and a quantity with no numeric field is left alone.
  """
  reconciled = dict(reading)
  for milli, base in EMETER_FIELDS:
    if milli in reconciled and base not in reconciled:
      if _is_number(reconciled[milli]):
        reconciled[base] = reconciled[milli] / 1000
    elif base in reconciled and milli not in reconciled:
      if _is_number(reconciled[base]):
        reconciled[milli] = reconciled[base] * 1000
  return reconciled


class SmartPlug:
  """A TP-Link HS100/HS110 smartplug reachable over the local network."""

  def __init__(self, address: str, timeout: Optional[float] = None):
    self._address = DeviceAddress.parse(address)
    self._timeout = timeout

  def __repr__(self) -> str:
    return f'SmartPlug({str(self._address)!r}, timeout={self._timeout!r})'

  @property
  def address(self) -> DeviceAddress:
    return self._address

  @property
  def host(self) -> str:
    return self._address.host

  @property
  def port(self) -> int:
    return self._address.port

  @property
  def timeout(self) -> Optional[float]:
    return self._timeout

  def with_timeout(self, timeout: float) -> 'SmartPlug':
    """Returns a client for the same plug using the given timeout."""
    return SmartPlug(str(self._address), timeout)

  def _send_command(self, command: str) -> str:
    """Sends a JSON command and returns the decrypted reply text."""
    log.debug('Sending %s to %s', command, self._address)
    raw = send_receive(self._address, encode_frame(command.encode('utf-8')),
                       self._timeout)
    return decode_frame(raw)

  def _query(self, module: str, action: str,
             params: Optional[Dict[str, Any]] = None) -> Any:
    reply = self._send_command(build_command(module, action, params))
    try:
      return json.loads(reply)
    except json.JSONDecodeError as e:
      raise MalformedJSONError(f'serde json: {e}') from e

  @staticmethod
  def _lookup(response: Any, path: Sequence[str]) -> Any:
    result = extract(response, path)
    if isinstance(result, Missing):
      raise KeyNotAvailableError(result.key, result.response)
    return result.value

  def _execute(self, module: str, action: str,
               params: Optional[Dict[str, Any]] = None) -> None:
    """Runs a command whose only answer is err_code."""
    response = self._query(module, action, params)
    err_code = as_int(self._lookup(response, [module, action, 'err_code']))
    if err_code != 0:
      raise DeviceReportedError(err_code)

  def info(self) -> Dict[str, Any]:
    """Returns the full get_sysinfo response.

    Looks similar to:
      {"system": {"get_sysinfo": {"alias": "Bathroom", "hw_ver": "1.0",
        "led_off": 0, "model": "HS110(EU)", "relay_state": 1, ...}}}
    """
    return as_dict(self._query(SYSTEM, GET_SYSINFO))

  def info_field(self, field: str) -> Any:
    """Returns one field of get_sysinfo."""
    return self._lookup(self.info(), [SYSTEM, GET_SYSINFO, field])

  def led_state(self) -> LedState:
    return LedState.from_bool(as_int(self.info_field('led_off')) == 0)

  def set_led_state(self, state: LedState) -> None:
    log.info('Setting LED to "%s".', state)
    self._execute(SYSTEM, SET_LED_OFF, {'off': led_off_flag_from(bool(state))})

  def hostname(self) -> str:
    """Returns the alias given to the plug in the Kasa app."""
    return as_str(self.info_field('alias'))

  def hw_version(self) -> HwVersion:
    return hw_version_from(as_str(self.info_field('hw_ver')))

  def power_state(self) -> PowerState:
    return PowerState.from_bool(as_int(self.info_field('relay_state')) == 1)

  def set_power_state(self, state: PowerState) -> None:
    log.info('Setting smartplug state to "%s".', state)
    self._execute(SYSTEM, SET_RELAY_STATE,
                  {'state': relay_state_flag_from(bool(state))})

  def cloudinfo(self) -> Dict[str, Any]:
    """Returns the cnCloud binding status (binded, server, username, ...)."""
    return as_dict(self._lookup(self._query(CLOUD, GET_INFO),
                                [CLOUD, GET_INFO]))

  def ap_list(self, refresh: bool = False) -> List[Dict[str, Any]]:
    """Returns the Wi-Fi access points the plug sees.

    With refresh the plug rescans the spectrum first. Entries look like
    {"ssid": "TP-Link_C1F3", "key_type": 3}.
    """
    response = self._query(NETIF, GET_SCANINFO, {'refresh': refresh})
    return as_list(self._lookup(response, [NETIF, GET_SCANINFO, 'ap_list']))

  def emeter(self) -> Dict[str, Any]:
    """Returns realtime energy meter values in both unit conventions.

    HS110 only; the HS100 has no energy meter.
    """
    response = self._query(EMETER, GET_REALTIME)
    reading = as_dict(self._lookup(response, [EMETER, GET_REALTIME]))
    return reconcile_emeter_units(reading)

  def reboot(self, delay: Optional[int] = None) -> None:
    """Reboots the plug after delay seconds."""
    log.info('Rebooting %s.', self._address)
    self._execute(SYSTEM, REBOOT, {'delay': delay or 0})

  def factory_reset(self, delay: Optional[int] = None) -> None:
    """Resets the plug to factory settings after delay seconds."""
    log.info('Factory resetting %s.', self._address)
    self._execute(SYSTEM, RESET, {'delay': delay or 0})
