"""
Media relay: brat image rendering and YouTube audio re-hosting over HTTP.
"""
