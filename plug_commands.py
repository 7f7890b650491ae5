#!/usr/bin/python3
"""Builds smartplug commands as compact JSON text."""

import json
from typing import Any, Dict, Optional

# https://github.com/softScheck/tplink-smartplug/blob/master/tplink-smarthome-commands.txt
SYSTEM = 'system'
EMETER = 'emeter'
CLOUD = 'cnCloud'
NETIF = 'netif'

GET_SYSINFO = 'get_sysinfo'
SET_RELAY_STATE = 'set_relay_state'
SET_LED_OFF = 'set_led_off'
REBOOT = 'reboot'
RESET = 'reset'
GET_INFO = 'get_info'
GET_SCANINFO = 'get_scaninfo'
GET_REALTIME = 'get_realtime'


def _device_value(value: Any) -> Any:
  # The device wants flags as 0/1, not JSON booleans.
  if isinstance(value, bool):
    return int(value)
  return value


def build_command(module: str, action: str,
                  params: Optional[Dict[str, Any]] = None) -> str:
  """Returns e.g. '{"system":{"get_sysinfo":{}}}'."""
  params = {k: _device_value(v) for k, v in (params or {}).items()}
  return json.dumps({module: {action: params}}, separators=(',', ':'))


def relay_state_flag_from(desired_on: bool) -> int:
  """Value of set_relay_state.state: 1 powers the outlet."""
  return 1 if desired_on else 0


def led_off_flag_from(desired_on: bool) -> int:
  """Value of set_led_off.off: inverted, 1 turns the LED off."""
  return 0 if desired_on else 1
