"""AI Decision Maker - structured analysis of decision scenarios."""
