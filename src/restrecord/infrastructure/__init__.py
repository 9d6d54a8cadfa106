"""Infrastructure: wire encoding and transports."""
