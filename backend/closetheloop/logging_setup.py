import logging
import sys


def configure_logging(level: str = "INFO") -> None:
	"""Configure root logging with ISO timestamps; safe to call more than once."""
	root_logger = logging.getLogger()
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)

	handler = logging.StreamHandler(sys.stdout)
	handler.setFormatter(logging.Formatter(
		"%(asctime)s - %(name)s - %(levelname)s - %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
	))
	root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
	root_logger.addHandler(handler)

	# Reduce noise from verbose third-party libraries
	for name in ("httpx", "httpcore", "botocore", "boto3", "pdfminer"):
		logging.getLogger(name).setLevel(logging.WARNING)
