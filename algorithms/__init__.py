"""
Algorithms package for the RAG Deadlock Detector.
Contains the wait-for graph builder, cycle detection and cycle explanation.
"""
