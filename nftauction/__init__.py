"""
nftauction

An in-process blockchain simulator and the upgradeable NFT auction that
runs on it:
- Signed transactions, automining, gas and atomic reverts
- UUPS proxies for upgradeable contracts
- Mock ERC20 / ERC721 tokens and Chainlink-style price feeds
- English auctions with bids in ETH or any priced ERC20
"""
