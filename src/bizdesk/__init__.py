"""
Bizdesk — backend управления бизнесом (компании, сотрудники, клиенты,
товары, бухгалтеры и покупки).
"""

__version__ = "1.0.0"
