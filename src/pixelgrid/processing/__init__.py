"""
Processing engines operating on Images.

geometry and pixel_algebra have no dependency on the container module;
convolution builds on both and is imported explicitly by callers.
"""
