"""
WebInk CLI - schema and database maintenance.

Usage:
    webink db schema myapp.models
    webink db schema myapp.models --dialect mysql
    webink db sync myapp.models --database-url sqlite:///blog.sqlite3 --drop
    webink db tables --database-url sqlite:///blog.sqlite3
"""

__version__ = "0.2.0"
__cli_name__ = "webink"
