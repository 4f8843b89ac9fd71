"""Interactive learning adventures generated by Gemini from study material."""
