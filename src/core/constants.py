AMOUNT_1E18 = 10**18

# fixed-point denominator of every price and ratio
PRICE_DENOMINATOR = AMOUNT_1E18
RATIO_DENOMINATOR = AMOUNT_1E18
INITIAL_ASSETS_PER_SHARE = AMOUNT_1E18

# fee rate is expressed in percent with 18 decimals
MAX_FEE_RATE = 100 * AMOUNT_1E18

BPS_DENOMINATOR = 10_000

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# protocol ids in the adapters registry
GMX_PROTOCOL_ID = 1
UNISWAP_PROTOCOL_ID = 2

# spot adapter operations
SPOT_BUY_EXACT_OUTPUT = 0
SPOT_SELL_EXACT_INPUT = 1

# perpetuals adapter operations
PERP_INCREASE_POSITION = 0
PERP_DECREASE_POSITION = 1
PERP_CREATE_INCREASE_ORDER = 2
PERP_UPDATE_ORDER = 3
PERP_CANCEL_ORDER = 4

TRADER_WALLET_LABEL = "trader wallet"
USERS_VAULT_LABEL = "users vault"

# who failed on AdapterOperationFailed
TRADER = "trader"
VAULT = "vault"

# contract kinds stored in the contract directory
TOKEN_KIND = "erc20_token"
USERS_VAULT_KIND = "users_vault"
TRADER_WALLET_KIND = "trader_wallet"
CONTRACTS_FACTORY_KIND = "contracts_factory"
ADAPTERS_REGISTRY_KIND = "adapters_registry"
SPOT_ADAPTER_KIND = "spot_swap_adapter"
PERP_ADAPTER_KIND = "perpetuals_adapter"

EVENT_SIGNATURES = {
    "Transfer": "Transfer(address,address,uint256)",
    "Approval": "Approval(address,address,uint256)",
    "UserDeposited": "UserDeposited(address,address,uint256)",
    "WithdrawRequest": "WithdrawRequest(address,address,uint256)",
    "SharesClaimed": "SharesClaimed(uint256,uint256,address,address)",
    "AssetsClaimed": "AssetsClaimed(uint256,uint256,address,address)",
    "TraderDeposit": "TraderDeposit(address,address,uint256)",
    "RolloverExecuted": "RolloverExecuted(uint256,uint256,int256,int256)",
    "OperationExecuted": "OperationExecuted(uint256,uint256,string,bool,uint256,int256)",
    "AdapterToUseAdded": "AdapterToUseAdded(uint256,address,address)",
    "AdapterToUseRemoved": "AdapterToUseRemoved(address,address)",
    "VaultAddressSet": "VaultAddressSet(address)",
    "AdaptersRegistryAddressSet": "AdaptersRegistryAddressSet(address)",
    "ContractsFactoryAddressSet": "ContractsFactoryAddressSet(address)",
    "DynamicValueAddressSet": "DynamicValueAddressSet(address)",
    "UnderlyingTokenAddressSet": "UnderlyingTokenAddressSet(address)",
    "TraderAddressSet": "TraderAddressSet(address)",
    "TraderWalletAddressSet": "TraderWalletAddressSet(address)",
    "FeeRateSet": "FeeRateSet(uint256)",
    "InvestorAdded": "InvestorAdded(address)",
    "InvestorRemoved": "InvestorRemoved(address)",
    "TraderAdded": "TraderAdded(address)",
    "TraderRemoved": "TraderRemoved(address)",
    "TraderWalletDeployed": "TraderWalletDeployed(address,address,address)",
    "UsersVaultDeployed": "UsersVaultDeployed(address,address)",
    "AdapterSet": "AdapterSet(uint256,address)",
    "AdapterRemoved": "AdapterRemoved(uint256)",
    "PriceSet": "PriceSet(address,uint256)",
    "PositionIncreased": "PositionIncreased(address,address,bool,uint256,uint256)",
    "PositionDecreased": "PositionDecreased(address,address,bool,uint256,int256)",
    "OrderCreated": "OrderCreated(address,uint256)",
    "OrderUpdated": "OrderUpdated(address,uint256)",
    "OrderCancelled": "OrderCancelled(address,uint256)",
    "Swap": "Swap(address,address,address,uint256,uint256)",
}
