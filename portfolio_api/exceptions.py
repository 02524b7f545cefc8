"""
Custom exceptions for the portfolio API
"""
class PortfolioAPIException(Exception):
    """Base exception for the portfolio API"""
    def __init__(self, message: str, error_code: str = None, details: dict = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

class ConfigurationError(PortfolioAPIException):
    """Configuration is missing or invalid"""
    pass

class SheetNotFoundError(PortfolioAPIException):
    """Named sheet does not exist in the spreadsheet"""
    pass

class FolderNotResolvedError(PortfolioAPIException):
    """Image folder id is unset or cannot be resolved"""
    pass

class UnknownActionError(PortfolioAPIException):
    """Request action is not recognized"""
    pass

class BackendError(PortfolioAPIException):
    """Google API call or credential lookup failed"""
    pass
