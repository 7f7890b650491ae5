#!/usr/bin/python3
# Copied and modified from https://github.com/softScheck/tplink-smartplug
"""TP-Link smart home protocol: XOR autokey cipher and length-prefixed frames.

A frame is a 4-byte big-endian payload length followed by the payload, which
is the command text run through the autokey cipher. Both the key seed and the
feedback are taken from the ciphertext stream, so decryption with the same
seed undoes encryption.
"""

import logging
from itertools import accumulate
from struct import pack, unpack
from typing import Iterable

from plug_errors import PayloadLengthMismatchError, ShortResponseError

log = logging.getLogger(__name__)

XOR_KEY = 171
HEADER_SIZE = 4


def encrypt(data: Iterable[int], key: int = XOR_KEY) -> bytes:
  """Encrypts bytes; the running key is the last ciphertext byte produced."""
  return bytes(accumulate(data, lambda k, b: k ^ b, initial=key))[1:]


def decrypt(data: bytes, key: int = XOR_KEY) -> bytes:
  """Decrypts bytes; the running key is the last ciphertext byte consumed."""
  data = bytes(data)
  return bytes(k ^ b for k, b in zip(bytes([key]) + data, data))


def obfuscate(key: int, data: bytes, decrypting: bool = False) -> bytes:
  """Applies the cipher in the requested direction, seeded with key."""
  if decrypting:
    return decrypt(data, key)
  return encrypt(data, key)


def encode_frame(command: bytes) -> bytes:
  """Wraps a plaintext command into a wire frame."""
  payload = encrypt(command)
  return pack('>I', len(payload)) + payload


def declared_length(header: bytes) -> int:
  """Returns the payload length announced by a 4-byte header."""
  return unpack('>I', header[:HEADER_SIZE])[0]


def decode_frame(raw: bytes) -> str:
  """Unwraps a wire frame and returns the decrypted text.

  Every decrypted byte maps to one character; device payloads are ASCII JSON.
  """
  if len(raw) < HEADER_SIZE:
    raise ShortResponseError(len(raw))

  declared = declared_length(raw)
  actual = len(raw) - HEADER_SIZE
  if actual != declared:
    raise PayloadLengthMismatchError(declared, actual)

  log.debug('Decoding %d byte payload.', actual)
  return ''.join(map(chr, decrypt(raw[HEADER_SIZE:])))
