"""Trip canvas layout engine: grid model, reflow and persistence gateways."""
