"""
Care Billing: график взносов и сверка оплат для дашборда клиентов.
"""

__version__ = "1.0.0"
