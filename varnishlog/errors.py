"""Exceptions raised while turning varnishlog output into transactions."""


class VarnishlogError(Exception):
    """Base class for every error raised by this package."""


class MalformedInput(VarnishlogError, ValueError):
    """A line from the log stream does not have the expected shape."""

    def __init__(self, text: str, reason: str):
        super().__init__(f"{reason}: {text!r}")
        self.text = text
        self.reason = reason


class MalformedLine(MalformedInput):
    """A content line is not ``-+ <tag> <value>``."""

    def __init__(self, text: str):
        super().__init__(text, "failed to parse line")


class MalformedBoundary(MalformedInput):
    """A ``*`` marker line does not end in a VXID."""

    def __init__(self, text: str):
        super().__init__(text, "failed to parse transaction VXID")


class MalformedReference(MalformedInput):
    """A Begin value is not ``<type> <vxid> <reason>``."""


class EndOfStream(VarnishlogError):
    """The line source closed with no transaction left to complete."""


class ChannelClosed(VarnishlogError):
    """A line was put on a channel after it was closed."""
