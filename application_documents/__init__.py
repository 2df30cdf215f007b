"""
Application document generation: state-specific PDF summaries of financial applications.
"""
