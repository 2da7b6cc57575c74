"""
Services used by the pipeline state handlers.
"""
