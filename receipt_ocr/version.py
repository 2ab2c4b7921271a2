import importlib.metadata
import os

from .config import SERVICE_NAME

VERSION = "unknown"

try:
	VERSION = importlib.metadata.version(SERVICE_NAME)
except importlib.metadata.PackageNotFoundError:
	pass


def get_version_info() -> dict[str, str]:
	# GIT_COMMIT is baked into the image by the container build
	return {"version": VERSION, "git_commit": os.getenv("GIT_COMMIT") or "unknown"}
