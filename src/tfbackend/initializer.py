"""Scaffold an S3 backend.tf in an isolated directory and run terraform init."""

import logging
import os
import shutil
import subprocess
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import OperationError, PreflightError

log = logging.info
err = logging.error
debug = logging.debug

BACKEND_FILENAME = 'backend.tf'
TERRAFORM_BIN = os.environ.get('TERRAFORM_BIN', 'terraform')

AUTH_HINT = '''Please configure your AWS credentials using:
  - aws configure
  - Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)
  - IAM role (if running on EC2/ECS/Lambda)'''


def run_and_log(cmd, cwd=None, env=None):
  log('CMD: %s', ' '.join(cmd))
  try:
    subprocess.run(cmd, cwd=cwd, env=env, check=True)
  except FileNotFoundError as e:
    raise OperationError(f'{cmd[0]} not found', command=cmd) from e
  except subprocess.CalledProcessError as e:
    err('Command failed: %s', ' '.join(cmd))
    raise OperationError('Command failed', command=cmd, returncode=e.returncode) from e


def _first_line_of_version(cmd):
  try:
    out = subprocess.run(cmd, capture_output=True, text=True, check=True)
  except (OSError, subprocess.CalledProcessError) as e:
    raise PreflightError(f'Unable to run {" ".join(cmd)}', details={'reason': str(e)}) from e
  # aws v1 prints its version on stderr
  text = (out.stdout or out.stderr or '').strip()
  return text.splitlines()[0] if text else ''


def check_aws_cli():
  if shutil.which('aws') is None:
    raise PreflightError(
      'aws-cli is not installed or not in PATH',
      hint='Install it from https://aws.amazon.com/cli/',
    )
  log('AWS CLI found: %s', _first_line_of_version(['aws', '--version']))


def verify_aws_auth(config):
  """Ask STS who we are; any credential problem is a PreflightError."""
  log('Verifying AWS credentials...')
  try:
    session = boto3.Session(profile_name=config.profile, region_name=config.region)
    identity = session.client('sts').get_caller_identity()
  except (BotoCoreError, ClientError) as e:
    raise PreflightError('AWS authentication failed', hint=AUTH_HINT,
                         details={'reason': str(e)}) from e
  log('AWS authentication verified (account %s, %s)',
      identity.get('Account', ''), identity.get('Arn', ''))
  return identity


def check_terraform(terraform_bin=TERRAFORM_BIN):
  if shutil.which(terraform_bin) is None:
    raise PreflightError(
      f'{terraform_bin} is not installed or not in PATH',
      hint='Install Terraform from https://developer.hashicorp.com/terraform/install',
    )
  log('Terraform found: %s', _first_line_of_version([terraform_bin, '--version']))


def run_preflight(config, terraform_bin=TERRAFORM_BIN):
  check_aws_cli()
  verify_aws_auth(config)
  check_terraform(terraform_bin)


def render_backend(config):
  fields = config.fields()
  width = max(len(name) for name, _ in fields)
  lines = [f'    {name.ljust(width)} = "{value}"' for name, value in fields]
  body = '\n'.join(lines)
  return f'''terraform {{
  backend "s3" {{
{body}
  }}
}}
'''


def prepare_working_dir(config, base_dir='.'):
  workdir = Path(base_dir) / config.working_dir_name
  try:
    workdir.mkdir(parents=True, exist_ok=True)
  except OSError as e:
    raise OperationError(f'Unable to create directory {workdir}: {e}') from e
  log('Working in isolated directory: %s', workdir)
  return workdir


def write_backend_file(config, workdir):
  out_path = Path(workdir) / BACKEND_FILENAME
  log('Generating %s...', BACKEND_FILENAME)
  try:
    out_path.write_text(render_backend(config))
  except OSError as e:
    raise OperationError(f'Unable to write {out_path}: {e}') from e
  log('Wrote %s', out_path)
  return out_path


def terraform_env(config):
  env = dict(os.environ)
  if config.profile is not None:
    env['AWS_PROFILE'] = config.profile
  return env


def run_terraform_init(config, workdir, terraform_bin=TERRAFORM_BIN, reconfigure=False):
  log('Running terraform init...')
  cmd = [terraform_bin, 'init', '-input=false']
  if reconfigure:
    cmd.append('-reconfigure')
  debug('terraform init: cwd=%s AWS_PROFILE=%s', workdir, config.profile or '<unset>')
  run_and_log(cmd, cwd=workdir, env=terraform_env(config))


def initialize(config, base_dir='.', terraform_bin=TERRAFORM_BIN, reconfigure=False,
               skip_preflight=False):
  """Run the whole init flow and return the working directory.

  Preflight checks finish before anything is created on disk. A failing
  ``terraform init`` leaves the directory and backend.tf in place.
  """
  if skip_preflight:
    log('Skipping preflight checks')
  else:
    run_preflight(config, terraform_bin)

  workdir = prepare_working_dir(config, base_dir)
  write_backend_file(config, workdir)

  log('Backend configuration created:')
  for name, value in config.fields():
    log('  %s: %s', name.capitalize(), value)
  log('  Directory: %s', workdir)

  run_terraform_init(config, workdir, terraform_bin, reconfigure)
  log('Terraform initialized successfully in %s/', workdir)
  return workdir
