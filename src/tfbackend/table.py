"""Fixed-width table output for tf-list-backends."""

COLUMNS = (('FILE', 40), ('BUCKET', 30), ('KEY', 50), ('REGION', 15))
ELLIPSIS = '...'
NONE_FOUND = 'No terraform files with S3 backends found'


def truncate(value, width):
  if len(value) > width:
    return value[:width - len(ELLIPSIS)] + ELLIPSIS
  return value


def format_row(values):
  return ' '.join(f'{value:<{width}}' for value, (_, width) in zip(values, COLUMNS))


def render_table(records):
  """Return the table as a list of lines.

  Values are truncated for display only; records are left untouched.
  """
  lines = [
    format_row([name for name, _ in COLUMNS]),
    format_row(['-' * len(name) for name, _ in COLUMNS]),
  ]
  for record in records:
    values = (record.source_file, record.bucket, record.key, record.region)
    lines.append(format_row([truncate(v, width) for v, (_, width) in zip(values, COLUMNS)]))
  if not records:
    lines.append(NONE_FOUND)
  return lines
