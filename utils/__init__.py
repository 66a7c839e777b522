"""
Shared configuration, logging, validation and error types
"""
