# src/parkchain/__init__.py
"""
Parkchain Gateway - Simulated Transaction Routing and Tiered Fees

Service layer behind the Parkchain "Gateway" showcase: a file-backed
transaction log with rolling metrics, tier calculation, smart channel
routing, batch coordination and achievements, exposed through a Telegram bot.
"""

__version__ = "0.3.0"
