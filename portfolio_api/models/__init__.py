"""
Response models for the portfolio API using Pydantic
"""
from portfolio_api.models.responses import (
    Link,
    PortfolioItem,
    ImageRecord,
    ErrorResponse
)

__all__ = [
    'Link',
    'PortfolioItem',
    'ImageRecord',
    'ErrorResponse'
]
