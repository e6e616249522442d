"""Exceptions raised by tfbackend.

Library code raises these; only the CLI turns them into exit codes.
"""


class TfBackendError(Exception):
  """Base exception for all tfbackend errors.

  Parameters
  ----------
  message : str
      Error message describing what went wrong.
  details : dict, optional
      Additional structured information about the error.
  """

  def __init__(self, message, details=None):
    super().__init__(message)
    self.message = message
    self.details = details or {}

  def __str__(self):
    if self.details:
      details_str = ', '.join(f'{k}={v}' for k, v in self.details.items())
      return f'{self.message} ({details_str})'
    return self.message


class UsageError(TfBackendError):
  """Invalid command-line input.

  Raised when:
  - A required flag is missing or an unknown flag is given
  - A value cannot be written safely into backend.tf
  - The directory to scan does not exist
  """

  pass


class PreflightError(TfBackendError):
  """A required tool is missing or AWS authentication failed.

  ``hint`` holds remediation text shown to the user.
  """

  def __init__(self, message, hint='', details=None):
    super().__init__(message, details)
    self.hint = hint


class OperationError(TfBackendError):
  """Creating the working directory, writing backend.tf or running init failed."""

  def __init__(self, message, command=None, returncode=None):
    details = {}
    if command:
      details['command'] = ' '.join(command)
    if returncode is not None:
      details['returncode'] = returncode
    super().__init__(message, details)
    self.command = command
    self.returncode = returncode
