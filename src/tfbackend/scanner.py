"""Line-oriented scan of Terraform files for S3 backend blocks.

The scan is a two-state machine (idle / in block). A ``backend "s3"``
line opens a block, the first ``bucket``, ``key`` and ``region``
assignments inside it are captured, and a line holding only ``}``
closes it and yields a record. Nested blocks are not tracked.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from .errors import UsageError

log = logging.info
warn = logging.warning
debug = logging.debug

MARKER = re.compile(r'backend\s+"s3"')
FIELDS = ('bucket', 'key', 'region')
FIELD_PATTERNS = {
  name: re.compile(r'(?<![\w.-])' + name + r'\s*=\s*"([^"]*)"') for name in FIELDS
}
SKIP_DIRS = {'.terraform', '.git'}


@dataclass(frozen=True)
class BackendRecord:
  source_file: str
  bucket: str = ''
  key: str = ''
  region: str = ''


class BackendScanner:
  IDLE = 'idle'
  IN_BLOCK = 'in_block'

  def __init__(self, source_file=''):
    self.source_file = str(source_file)
    self.state = self.IDLE
    self._values = {}

  def _reset(self):
    self.state = self.IDLE
    self._values = {}

  def _capture(self, line):
    for name, pattern in FIELD_PATTERNS.items():
      if name in self._values:
        continue
      m = pattern.search(line)
      if m:
        self._values[name] = m.group(1)

  def feed(self, line):
    """Consume one line; return a BackendRecord when a block closes."""
    if self.state == self.IDLE:
      if not MARKER.search(line):
        return None
      self.state = self.IN_BLOCK

    self._capture(line)

    if line.strip() == '}':
      record = BackendRecord(self.source_file, **{n: self._values.get(n, '') for n in FIELDS})
      self._reset()
      return record
    return None

  def finish(self):
    if self.state == self.IN_BLOCK:
      warn('Unterminated backend "s3" block in %s; ignoring it', self.source_file or '<input>')
    self._reset()


def scan_lines(lines, source_file=''):
  scanner = BackendScanner(source_file)
  records = []
  for line in lines:
    record = scanner.feed(line)
    if record is not None:
      records.append(record)
  scanner.finish()
  return records


def scan_file(path):
  debug('Scanning file %s', path)
  try:
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
      return scan_lines(f, source_file=path)
  except OSError as e:
    warn('Unable to read %s: %s', path, e)
    return []


def find_tf_files(root):
  for dirpath, dirnames, filenames in os.walk(root):
    dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
    for filename in sorted(filenames):
      if filename.endswith('.tf'):
        yield os.path.join(dirpath, filename)


def scan_tree(root='.'):
  if not Path(root).is_dir():
    raise UsageError(f"Directory '{root}' not found")
  log('Scanning %s for terraform files', root)
  records = []
  for path in find_tf_files(root):
    records.extend(scan_file(path))
  return records
