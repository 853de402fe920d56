"""
Analysis package for the RAG Deadlock Detector.
Contains the graph event log.
"""
