"""Section reading and bulk insertion tools."""
