"""Ki1r0y scene and media sharing server."""
