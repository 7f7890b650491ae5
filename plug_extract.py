#!/usr/bin/python3
"""Walks decoded smartplug responses by key path.

extract() never raises for an absent key. It returns either Found or Missing
and leaves the decision to the caller. The as_* helpers coerce a found leaf
and raise UnexpectedValueShapeError when the JSON kind does not match.
"""

from numbers import Real
from typing import Any, Dict, List, NamedTuple, Sequence, Union

from plug_errors import UnexpectedValueShapeError


class Found(NamedTuple):
  value: Any


class Missing(NamedTuple):
  key: str
  response: Any


Extracted = Union[Found, Missing]


def extract(response: Any, path: Sequence[str]) -> Extracted:
  """Resolves path left to right; the first absent key yields Missing."""
  current = response
  for key in path:
    if not isinstance(current, dict) or key not in current:
      return Missing(key, response)
    current = current[key]
  return Found(current)


def as_int(value: Any) -> int:
  # bool is an int subclass but never a JSON number.
  if isinstance(value, bool) or not isinstance(value, int):
    raise UnexpectedValueShapeError('integer', value)
  return value


def as_number(value: Any) -> float:
  if isinstance(value, bool) or not isinstance(value, Real):
    raise UnexpectedValueShapeError('number', value)
  return value


def as_str(value: Any) -> str:
  if not isinstance(value, str):
    raise UnexpectedValueShapeError('string', value)
  return value


def as_list(value: Any) -> List[Any]:
  if not isinstance(value, list):
    raise UnexpectedValueShapeError('array', value)
  return value


def as_dict(value: Any) -> Dict[str, Any]:
  if not isinstance(value, dict):
    raise UnexpectedValueShapeError('object', value)
  return value
