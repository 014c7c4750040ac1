"""Saga building blocks: the history ledger and the batch executor."""
