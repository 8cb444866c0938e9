"""Push layer: build server client and in-order publishing."""

from .client import HttpPublisher, Job, PublishError, Publisher
from .publish import publish_all

__all__ = ["HttpPublisher", "Job", "PublishError", "Publisher", "publish_all"]
