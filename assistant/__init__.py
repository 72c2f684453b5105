"""MaxMovies AI chat assistant: memory, language heuristic, and DeepSeek proxy."""
