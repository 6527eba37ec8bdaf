from core.constants import ADAPTERS_REGISTRY_KIND, ZERO_ADDRESS
from models import AdapterRegistration, AdaptersRegistryState
from services.base import Contract, contract_kind, external, require_address


@contract_kind(ADAPTERS_REGISTRY_KIND)
class AdaptersRegistry(Contract):
    state_model = AdaptersRegistryState

    @classmethod
    def deploy(cls, ledger, caller, owner_address=None):
        address = ledger.new_address()
        with ledger.call(address, caller, "deploy"):
            ledger.register(address, cls.kind, caller)
            ledger.session.add(
                AdaptersRegistryState(address=address, owner_address=owner_address or caller)
            )
            ledger.session.flush()
        return cls(ledger, address)

    def _registration(self, protocol_id: int):
        return self.session.get(AdapterRegistration, (self.address, protocol_id))

    def is_adapter_allowed(self, protocol_id: int) -> bool:
        return self._registration(protocol_id) is not None

    def get_adapter_address(self, protocol_id: int) -> str:
        registration = self._registration(protocol_id)
        return registration.adapter_address if registration else ZERO_ADDRESS

    @external()
    def set_adapter(self, caller, protocol_id: int, adapter_address: str):
        self._only_owner(caller, self.state().owner_address)
        require_address(adapter_address, "adapter")
        registration = self._registration(protocol_id)
        if registration is None:
            self.session.add(
                AdapterRegistration(
                    registry_address=self.address,
                    protocol_id=protocol_id,
                    adapter_address=adapter_address,
                )
            )
            self.session.flush()
        else:
            registration.adapter_address = adapter_address
        self.emit("AdapterSet", protocol_id=protocol_id, adapter=adapter_address)

    @external()
    def remove_adapter(self, caller, protocol_id: int):
        self._only_owner(caller, self.state().owner_address)
        registration = self._registration(protocol_id)
        if registration is not None:
            self.session.delete(registration)
            self.session.flush()
        self.emit("AdapterRemoved", protocol_id=protocol_id)
