class HuffmanError(ValueError): # Base class for every error the codec raises
    pass


class EmptyInputError(HuffmanError): # No symbols to build a tree from
    pass


class CorruptTreeError(HuffmanError): # Shape bits and leaf list disagree
    pass


class TruncatedStreamError(HuffmanError): # Payload bits end in the middle of a codeword
    pass


class UnknownSymbolError(HuffmanError): # Input byte has no codeword in the table
    pass
