## The CRC-32 used to protect every PNG chunk. This is the same CRC
## used by zlib and Ethernet (reflected polynomial 0xedb88320, register
## preset to all ones and complemented at the end), so zlib.crc32
## gives identical results.

REFLECTED_POLYNOMIAL = 0xedb88320
INITIAL_REGISTER = 0xffffffff

## Builds the lookup table of CRCs for every possible byte value.
def _build_table() -> tuple:
    table = []
    for byte_value in range(256):
        register = byte_value
        for _ in range(8):
            if register & 1:
                register = REFLECTED_POLYNOMIAL ^ (register >> 1)
            else:
                register >>= 1
        table.append(register)
    # A tuple, so the table cannot be changed once the module is loaded.
    return tuple(table)

CRC_TABLE = _build_table()

## Continues a running CRC over more data. 
## \param[in] data - Any bytes-like object.
## \param[in] crc - The CRC of all the data processed so far (zero for none).
## \return The CRC of the previous data followed by the given data.
def update_crc32(data, crc: int = 0) -> int:
    register = crc ^ INITIAL_REGISTER
    for byte in bytes(data):
        register = CRC_TABLE[(register ^ byte) & 0xff] ^ (register >> 8)
    return register ^ INITIAL_REGISTER

## \return The CRC-32 of the given data. The CRC of no data is zero.
def crc32(data) -> int:
    return update_crc32(data)
