"""
Feature routers
"""
