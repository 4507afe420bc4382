"""Server-rendered redirect page.

The page is a static payload: all token handling happens in the inline
script, because the hash fragment never reaches the server.
"""
