#!/usr/bin/python3
"""One-shot TCP round trip to a smartplug."""

import logging
import socket
from typing import Optional, Tuple

from plug_errors import PlugIOError
from plug_protocol import HEADER_SIZE, declared_length

log = logging.getLogger(__name__)

NET_BUFFER_SIZE = 8192


def _recv_up_to(sock: socket.socket, count: int) -> bytes:
  """Reads count bytes, or fewer if the peer closes the connection."""
  received = b''
  while len(received) < count:
    chunk = sock.recv(min(NET_BUFFER_SIZE, count - len(received)))
    if not chunk:
      break
    received += chunk
  return received


def send_receive(address: Tuple[str, int], payload: bytes,
                 timeout: Optional[float] = None) -> bytes:
  """Sends one encoded frame and returns the raw response frame.

  A fresh connection is opened and closed for every call. The timeout, when
  given, applies to connect, each write and each read. A connection closed
  mid-frame yields the bytes received so far; decode_frame rejects them.
  """
  host, port = address
  try:
    with socket.create_connection((host, port), timeout=timeout) as sock:
      log.debug('Connected to %s:%d, sending %d bytes.', host, port,
                len(payload))
      sock.sendall(payload)

      header = _recv_up_to(sock, HEADER_SIZE)
      if len(header) < HEADER_SIZE:
        return header
      body = _recv_up_to(sock, declared_length(header))
  except OSError as e:
    raise PlugIOError(f'IO: {e}') from e

  log.debug('Received %d bytes from %s:%d.', len(header) + len(body), host,
            port)
  return header + body
