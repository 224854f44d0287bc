"""
                Barista Order Service

A concurrent cafe order-fulfillment server: clients connect over a
line-based TCP session, order tea and coffee, poll their status and
collect finished drinks while a bounded pool of preparation slots works
through a single FIFO queue.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
