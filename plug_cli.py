#!/usr/bin/python3
"""Command line client for TP-Link HS100/HS110 smartplugs."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from plug_client import SMARTPLUG_PORT, LedState, PowerState, SmartPlug
from plug_errors import SmartPlugError


def _print_json(value) -> None:
  print(json.dumps(value, indent=2, sort_keys=True))


def _switch(args, current, setter, state_cls, what: str) -> None:
  if args.on or args.off:
    setter(state_cls.from_bool(args.on))
  else:
    print(f'{what} is {current()}')


def run(plug: SmartPlug, args: argparse.Namespace) -> None:
  """Performs the requested subcommand against plug."""
  if args.command == 'info':
    _print_json(plug.info())
  elif args.command == 'led':
    _switch(args, plug.led_state, plug.set_led_state, LedState, 'LED')
  elif args.command == 'power':
    _switch(args, plug.power_state, plug.set_power_state, PowerState, 'Power')
  elif args.command == 'hostname':
    print(plug.hostname())
  elif args.command == 'hwver':
    print(plug.hw_version())
  elif args.command == 'cloudinfo':
    _print_json(plug.cloudinfo())
  elif args.command == 'wlanscan':
    _print_json(plug.ap_list(args.refresh))
  elif args.command == 'emeter':
    _print_json(plug.emeter())
  elif args.command == 'reboot':
    plug.reboot(args.delay)
  elif args.command == 'reset':
    plug.factory_reset(args.delay)


def _add_on_off(subparser: argparse.ArgumentParser, what: str) -> None:
  group = subparser.add_mutually_exclusive_group()
  group.add_argument('-1', '--on', action='store_true', default=False,
                     help=f'Turn {what} on.')
  group.add_argument('-0', '--off', action='store_true', default=False,
                     help=f'Turn {what} off.')


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(description='TP-Link Kasa HS110 client')
  parser.add_argument('host',
                      help='Smartplug hostname or IP address.')
  parser.add_argument('-p', '--port', type=int, default=SMARTPLUG_PORT,
                      help=f'TCP port number (default: {SMARTPLUG_PORT}).')
  parser.add_argument('-t', '--timeout', type=float, default=None,
                      help='Network timeout in seconds.')
  parser.add_argument('-v', '--verbose', action='store_true', default=False,
                      help='Log protocol details.')

  sub = parser.add_subparsers(dest='command', required=True)
  sub.add_parser('info', help='Get smartplug system information.')
  _add_on_off(sub.add_parser('led', help='Manage LED state.'), 'LED')
  _add_on_off(sub.add_parser('power', help='Manage power relay state.'),
              'power')
  sub.add_parser('hostname', help='Get smartplug name (alias).')
  sub.add_parser('hwver', help='Get hardware version.')
  sub.add_parser('cloudinfo', help='Get cloud connection information.')
  wlanscan = sub.add_parser('wlanscan', help='List visible Wi-Fi networks.')
  wlanscan.add_argument('--refresh', action='store_true', default=False,
                        help='Rescan the Wi-Fi spectrum first.')
  sub.add_parser('emeter', help='Get realtime energy meter readings.')
  for name, help_text in (('reboot', 'Reboot the smartplug.'),
                          ('reset', 'Reset the smartplug to factory settings.')):
    command = sub.add_parser(name, help=help_text)
    command.add_argument('--delay', type=int, default=1,
                         help='Seconds to wait before acting (default: 1).')
  return parser


def main(argv: Optional[List[str]] = None) -> int:
  args = build_parser().parse_args(argv)

  logging.basicConfig(
      format='%(levelname).1s%(asctime)s %(lineno)d]  %(message)s',
      level=logging.DEBUG if args.verbose else logging.INFO,
      datefmt='%H:%M:%S')

  try:
    host = f'[{args.host}]' if ':' in args.host else args.host
    plug = SmartPlug(f'{host}:{args.port}', args.timeout)
    run(plug, args)
  except SmartPlugError as e:
    logging.error('%s', e)
    return 1
  return 0


if __name__ == '__main__':
  sys.exit(main())
