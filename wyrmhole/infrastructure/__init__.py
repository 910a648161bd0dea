"""
Infrastructure implementations of the core interfaces
"""
