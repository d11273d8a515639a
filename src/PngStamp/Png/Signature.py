## Every PNG file starts with these eight bytes. The non-ASCII first byte and the
## CR-LF/SUB/LF tail catch files mangled by 7-bit or newline-converting transfers.
PNG_SIGNATURE = bytes((0x89, ord('P'), ord('N'), ord('G'), 0x0d, 0x0a, 0x1a, 0x0a))

## \return True if the data starts with the PNG signature; False otherwise,
## including when there is not even enough data for a whole signature.
def has_png_signature(data) -> bool:
    if len(data) < len(PNG_SIGNATURE):
        return False
    return bytes(data[:len(PNG_SIGNATURE)]) == PNG_SIGNATURE
