"""GameTorch animation client: submit, poll and download animation renders."""

__version__ = "0.1.0"
