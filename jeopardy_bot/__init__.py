"""
Discord bot that deals Jeopardy boards from a remote trivia service.
"""
