class VisionAdapter:
    def recognize_once(self):
        """Return a Prediction without looking at any image."""
        raise NotImplementedError

    def identify(self, image_bytes: bytes | None):
        """Return a Prediction from raw image bytes; used by /api/recognize."""
        # Default: ignore the image, fall back to recognize_once
        return self.recognize_once()
