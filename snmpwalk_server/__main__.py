from snmpwalk_server.cli import main

main()
