"""Backend configuration value built once from command-line input."""

import os
import re
from dataclasses import dataclass
from typing import Optional

from .errors import UsageError

# Defaults (env overridable, read once at import like the CLI flags)
DEFAULT_REGION = os.environ.get('TF_BACKEND_DEFAULT_REGION', 'eu-west-2')
DEFAULT_PROFILE = 'default'

# Anything that would break out of, or be interpolated inside, a quoted HCL string
_UNSAFE_VALUE = re.compile(r'["\\\x00-\x1f\x7f]|\$\{')


def working_dir_name(key):
  return key.replace('/', '_')


@dataclass(frozen=True)
class BackendConfig:
  bucket: str
  key: str
  region: str = DEFAULT_REGION
  profile: Optional[str] = None

  @classmethod
  def from_args(cls, bucket, key, region=None, profile=None, with_profile=False,
                default_region=None):
    """Build and validate a config from parsed flags.

    ``profile`` switches on the profile-aware variant; ``with_profile``
    does the same with DEFAULT_PROFILE when no name was given.
    """
    if not profile and with_profile:
      profile = DEFAULT_PROFILE
    config = cls(
      bucket=bucket or '',
      key=key or '',
      region=region or default_region or DEFAULT_REGION,
      profile=profile or None,
    )
    config.validate()
    return config

  @property
  def working_dir_name(self):
    return working_dir_name(self.key)

  def fields(self):
    pairs = [('bucket', self.bucket), ('key', self.key), ('region', self.region)]
    if self.profile is not None:
      pairs.append(('profile', self.profile))
    return pairs

  def validate(self):
    if not self.bucket:
      raise UsageError('--bucket is required')
    if not self.key:
      raise UsageError('--key is required')
    for name, value in self.fields():
      if not value:
        raise UsageError(f'--{name} must not be empty')
      if _UNSAFE_VALUE.search(value):
        raise UsageError(
          f'--{name} contains characters that cannot be written into backend.tf',
          {'value': repr(value)},
        )
    if self.working_dir_name in ('.', '..'):
      raise UsageError(f'--key {self.key!r} does not name a usable working directory')
