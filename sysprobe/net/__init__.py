"""Layer-by-layer decoding of raw Ethernet frames, from data link up to DNS, HTTP and TLS."""