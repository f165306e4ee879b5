"""PlayHub API: credits economy, rewards, subscriptions and tournaments."""
