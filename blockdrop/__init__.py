"""BlockDrop: a falling-block puzzle game with a shared score leaderboard."""
