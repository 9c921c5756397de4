from funding_relay.main import main

main()
