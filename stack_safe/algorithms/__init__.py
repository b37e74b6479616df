"""
Recursive algorithms in naive and stack-safe form.

Each module pairs a plain recursive implementation, which is limited by the
interpreter's call stack, with trampolined ones built on ``stack_safe``.
"""
