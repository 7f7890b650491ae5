#!/usr/bin/python3
import unittest

import plug_protocol
from plug_errors import PayloadLengthMismatchError, ShortResponseError


class TestCipher(unittest.TestCase):
  def test_encrypt_decrypt(self):
    """Test that encryption and decryption are reversible."""
    for original in (b'{"system":{"get_sysinfo":{}}}', b'\x00', b'\xff' * 300,
                     bytes(range(256))):
      encrypted = plug_protocol.encrypt(original)
      self.assertEqual(plug_protocol.decrypt(encrypted), original)

  def test_known_ciphertext(self):
    encrypted = plug_protocol.encrypt(b'{"system"')
    # 171 ^ ord('{') == 0xd0, then each byte is keyed by the previous one.
    self.assertEqual(encrypted[:4], b'\xd0\xf2\x81\xf8')

  def test_key_is_reseeded_every_call(self):
    first = plug_protocol.encrypt(b'abc')
    second = plug_protocol.encrypt(b'abc')
    self.assertEqual(first, second)

  def test_empty(self):
    self.assertEqual(plug_protocol.encrypt(b''), b'')
    self.assertEqual(plug_protocol.decrypt(b''), b'')

  def test_obfuscate_directions(self):
    encrypted = plug_protocol.obfuscate(171, b'hello')
    self.assertEqual(encrypted, plug_protocol.encrypt(b'hello'))
    self.assertEqual(
        plug_protocol.obfuscate(171, encrypted, decrypting=True), b'hello')


class TestFrame(unittest.TestCase):
  def test_encode_frame_header(self):
    frame = plug_protocol.encode_frame(b'{"system":{"get_sysinfo":{}}}')
    self.assertEqual(frame[:4], b'\x00\x00\x00\x1d')
    self.assertEqual(len(frame), 4 + 29)

  def test_round_trip(self):
    command = '{"system":{"set_relay_state":{"state":1}}}'
    frame = plug_protocol.encode_frame(command.encode('utf-8'))
    self.assertEqual(plug_protocol.decode_frame(frame), command)

  def test_length_mismatch(self):
    with self.assertRaises(PayloadLengthMismatchError) as cm:
      plug_protocol.decode_frame(bytes([0, 0, 0, 5, 1, 2, 3]))
    self.assertEqual(cm.exception.declared, 5)
    self.assertEqual(cm.exception.actual, 3)

  def test_longer_than_declared(self):
    with self.assertRaises(PayloadLengthMismatchError):
      plug_protocol.decode_frame(bytes([0, 0, 0, 1, 1, 2]))

  def test_short_response(self):
    with self.assertRaises(ShortResponseError) as cm:
      plug_protocol.decode_frame(bytes([0, 0]))
    self.assertEqual(cm.exception.length, 2)

  def test_empty_payload(self):
    self.assertEqual(plug_protocol.decode_frame(b'\x00\x00\x00\x00'), '')


if __name__ == '__main__':
  unittest.main()
