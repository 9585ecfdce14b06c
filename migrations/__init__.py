"""
Migrations Package - One-off data scripts and CLI commands
"""
