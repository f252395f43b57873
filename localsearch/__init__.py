"""Local-search metaheuristics over mazes, tours, images and benchmark functions."""
