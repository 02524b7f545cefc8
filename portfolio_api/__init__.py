"""
Portfolio API - serves portfolio items from a spreadsheet and images from a Drive folder
"""
__version__ = "1.0.0"
