#!/usr/bin/python3
"""Exceptions raised by the smartplug client."""

from typing import Any


class SmartPlugError(Exception):
  """Base class for every smartplug client failure."""


class ShortResponseError(SmartPlugError):
  """Response is too short to hold the 4-byte length header."""

  def __init__(self, length: int):
    super().__init__(f'encrypted response is too short (length: {length})')
    self.length = length


class PayloadLengthMismatchError(SmartPlugError):
  """Payload length differs from the length declared in the header."""

  def __init__(self, declared: int, actual: int):
    super().__init__(
        f'encrypted response payload length ({actual}) differs from payload '
        f'length specified in the header ({declared})')
    self.declared = declared
    self.actual = actual


class PlugIOError(SmartPlugError):
  """Connect, read, write or timeout failure talking to the plug."""


class MalformedJSONError(SmartPlugError):
  """Decoded response is not valid JSON."""


class KeyNotAvailableError(SmartPlugError):
  """Expected key is missing from the response."""

  def __init__(self, key: str, response: Any):
    super().__init__(
        f'key {key!r} is not available in the response: {response!r}')
    self.key = key
    self.response = response


class UnexpectedValueShapeError(SmartPlugError):
  """JSON value is present but not of the expected kind."""

  def __init__(self, expected: str, value: Any):
    super().__init__(
        f'JSON value represented in unexpected form: expected {expected}, '
        f'got {value!r}')
    self.expected = expected
    self.value = value


class DeviceReportedError(SmartPlugError):
  """Smartplug answered with a nonzero err_code."""

  def __init__(self, err_code: int):
    super().__init__(
        f'smartplug reported the command has failed (err_code = {err_code})')
    self.err_code = err_code


class AddressParseError(SmartPlugError, ValueError):
  """Address string could not be parsed."""

  def __init__(self, address: str, reason: str):
    super().__init__(f'failed to parse address {address!r}: {reason}')
    self.address = address
    self.reason = reason


class MissingAddressComponentError(SmartPlugError, ValueError):
  """Host or port is missing from an address."""

  def __init__(self, component: str):
    super().__init__(f'smartplug {component} is not provided')
    self.component = component
