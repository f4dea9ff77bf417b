"""
Letter rendering, email dispatch and the submission pipeline.
"""
