"""
Utilities package for the RAG Deadlock Detector.
Contains the logger and the JSON scenario loader.
"""
