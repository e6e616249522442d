"""Terraform S3 backend helpers.

This package provides CLI tools to scaffold and initialize Terraform
S3 backend configurations and to list the S3 backends declared in a
tree of Terraform files.
"""

from .version import __version__

__all__ = ["__version__"]
