"""
                Munchly Eats

Client core for a food-delivery app: cart pricing and promo rules,
checkout, the order status lifecycle and a simulated live tracking
engine, served over a small FastAPI surface with in-process mock
backends.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
