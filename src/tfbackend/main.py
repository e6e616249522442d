import argparse
import logging
import sys

from .config import DEFAULT_REGION, BackendConfig
from .errors import PreflightError, TfBackendError, UsageError
from .initializer import TERRAFORM_BIN, initialize
from .scanner import scan_tree
from .table import render_table

logging.basicConfig(level=logging.INFO, format='[%(asctime)s] %(levelname)s: %(message)s')
log = logging.info
err = logging.error


class _ArgumentParser(argparse.ArgumentParser):
  """argparse with usage errors raised as UsageError instead of exit 2."""

  def error(self, message):
    self.print_usage(sys.stderr)
    raise UsageError(message)


def _set_verbosity(verbose):
  if verbose:
    logging.getLogger().setLevel(logging.DEBUG)


def parse_init_args(argv):
  parser = _ArgumentParser(
    prog='tf-init',
    description='Generate an S3 backend.tf in an isolated directory and run terraform init.',
  )
  parser.add_argument('--bucket', required=True, help='S3 bucket name for Terraform state')
  parser.add_argument('--key', '--state', dest='key', required=True,
                      help='Path to state file in bucket (e.g., env/prod/terraform.tfstate)')
  parser.add_argument('--region', default='', help=f'AWS region (default: {DEFAULT_REGION})')
  parser.add_argument('--profile', default='', help='AWS profile; adds a profile field to backend.tf')
  parser.add_argument('--with-profile', action='store_true',
                      help='Add a profile field using the "default" profile')
  parser.add_argument('--default-region', default=DEFAULT_REGION,
                      help='Region used when --region is not given')
  parser.add_argument('--target-dir', default='.',
                      help='Directory in which the working directory is created')
  parser.add_argument('--terraform-bin', default=TERRAFORM_BIN,
                      help='Terraform-compatible binary to run')
  parser.add_argument('--reconfigure', action='store_true', help='Pass -reconfigure to terraform init')
  parser.add_argument('--skip-preflight', action='store_true',
                      help='Do not check the AWS CLI, credentials and terraform before writing')
  parser.add_argument('-v', '--verbose', action='store_true')
  return parser.parse_args(argv)


def parse_list_args(argv):
  parser = _ArgumentParser(
    prog='tf-list-backends',
    description='List all S3 backend configurations in terraform files.',
  )
  parser.add_argument('directory', nargs='?', default='.', help='Directory to search (default: .)')
  parser.add_argument('-v', '--verbose', action='store_true')
  return parser.parse_args(argv)


def init_main(argv):
  args = parse_init_args(argv)
  _set_verbosity(args.verbose)

  config = BackendConfig.from_args(
    bucket=args.bucket,
    key=args.key,
    region=args.region,
    profile=args.profile,
    with_profile=args.with_profile,
    default_region=args.default_region,
  )
  workdir = initialize(
    config,
    base_dir=args.target_dir,
    terraform_bin=args.terraform_bin,
    reconfigure=args.reconfigure,
    skip_preflight=args.skip_preflight,
  )
  print(workdir)
  return 0


def list_main(argv):
  args = parse_list_args(argv)
  _set_verbosity(args.verbose)

  records = scan_tree(args.directory)
  for line in render_table(records):
    print(line)
  log('Found %d S3 backend(s)', len(records))
  return 0


def _run(main, argv):
  try:
    return main(argv)
  except SystemExit as e:
    return e.code
  except KeyboardInterrupt:
    return 130
  except PreflightError as e:
    err('Error: %s', e)
    if e.hint:
      err(e.hint)
    return 1
  except TfBackendError as e:
    err('Error: %s', e)
    return 1
  except Exception as e:
    err(f"Unexpected error: {e}")
    return 1


def init_cli():
  """Entry point for tf-init."""
  sys.exit(_run(init_main, sys.argv[1:]))


def list_cli():
  """Entry point for tf-list-backends."""
  sys.exit(_run(list_main, sys.argv[1:]))

