from dupfinder.core.models import DigestAlgorithm, OutputFormat

ALGORITHM_ALIASES = {
    "md5": DigestAlgorithm.MD5,
    "sha1": DigestAlgorithm.SHA1,
    "sha256": DigestAlgorithm.SHA256,
    "sha512": DigestAlgorithm.SHA512,
}

ALGORITHM_CHOICES = list(ALGORITHM_ALIASES.keys())

ALGORITHM_HELP_TEXT = (
    "Hash algorithm used to compare file contents:\n"
    "  md5    : 128-bit, fastest, collisions possible (combine with --verify)\n"
    "  sha1   : 160-bit\n"
    "  sha256 : 256-bit (default)\n"
    "  sha512 : 512-bit\n"
)

FORMAT_ALIASES = {
    "text": OutputFormat.TEXT,
    "json": OutputFormat.JSON,
    "csv": OutputFormat.CSV,
}

FORMAT_CHOICES = list(FORMAT_ALIASES.keys())

EPILOG_TEXT = """
Examples:
  Find duplicates in Downloads folder
  %(prog)s ~/Downloads

  Only files of 1MB and more, byte-verified, MD5 for speed
  %(prog)s ~/Downloads -s 1M -a md5 --verify

  Export results for scripts
  %(prog)s ~/Downloads -f json > report.json
  %(prog)s ~/Downloads -o report.csv -j report.json

  Choose which copies to delete, group by group
  %(prog)s ~/Photos --interactive

  Keep the first copy of every group and delete the rest (moved to trash)
  %(prog)s ~/Photos --auto-delete --trash

Exit codes:
  0 no duplicates, 1 duplicates found, 2 invalid directory, 3 conflicting options
"""
